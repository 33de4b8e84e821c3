"""
Notification service layer.

- action_log: append-only action ledger (write + query)
- emails: reminder rendering and mail transport
- reminders: scheduled reminder emitters
"""
