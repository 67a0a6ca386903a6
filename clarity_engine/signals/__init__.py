"""
Call-signal processing.

Pipeline (all pure functions, no I/O):
  1. ``classifier.classify``        - transcript → ``Signal`` (intent, urgency, topic)
  2. ``value.estimate_value``        - ``Signal`` + price range → estimated job value
  3. ``followup``                    - priority, next steps, one-line summary
  4. ``intake.analyze_call``         - composes 1–3 for one call
  5. ``intake.build_opportunity``    - turns an analysis into an ``Opportunity``
"""
