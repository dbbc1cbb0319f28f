"""
Persistence collaborator.

Responsibilities:
- Hold customers, food items (with their embedded feedback) and orders.
- Answer feedback and order queries with item names resolved.
- Attach chef/admin replies to a single feedback record.
"""
