"""
User profiling helpers feeding the scoring pass.

  - ``chaos``    - onboarding quiz → chaos score, indicator, quick wins, factors.
  - ``behavior`` - engagement history → implementation rate and summary;
                   setup preference → complexity tolerance fallback.
"""
