"""
Order handling for the kitchen.

Responsibilities:
- Place orders priced from the menu.
- Validate status transitions.
- Build the chef queue, optionally annotated with cooking recommendations.
"""
