"""
Recommendation pipeline.

Modules:
  - ``generators``  - one static catalog per focus area, tailored to a profile.
  - ``scorer``      - additive score with a term-by-term breakdown.
  - ``selector``    - complexity-tolerance filter, stable sort, frequency cap.
  - ``engine``      - generate → score → select, and conversion to
                      ``ActiveRecommendation`` records.

Pipeline (called by ``ScoringPassStage``)::

    candidates = generate_candidates(profile, preferences)
    scored     = score_candidates(candidates, profile, weights)
    selected   = select_scored(scored, preferences, caps)
    records    = build_active_recommendations(selected, user_id, now, ttl_days)
"""
