"""Cross-Border Settlement Review Service.

This service lets employees:
- Filter the list of cross-border payment transactions
- Inspect transaction details
- Approve or reject pending transactions
- Submit verified transactions to the settlement network in batches
"""

__version__ = "0.1.0"
