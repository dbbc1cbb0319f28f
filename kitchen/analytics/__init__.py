"""
Satisfaction analytics and chef recommendation engine.

Responsibilities:
- Collect feedback for a user, a food item or the whole menu.
- Classify comment sentiment with per-call fault isolation.
- Score satisfaction, bucket it over time and build profile reports.
- Synthesize chef-facing cooking recommendations from feedback history.
"""
