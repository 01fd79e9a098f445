"""
Ledger and progress services for Skillverse.

- ledger: balance credit/debit and the transaction log
- progress_store: lesson progress rows and the cached percentage
- catalog: read-only course and lesson lookups
- enrollment: the enroll operation
- progress: lesson completion and time tracking
- queries: read views for balances, history and progress
"""
