"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Classify the sentiment of customer feedback comments.
- Summarize a customer's feedback history into a short digest.
- Generate chef-facing cooking guidance from the digest and the current order.
"""
