"""
Books Modules.

Thin orchestration layers over the Books Kernel and Engines:

- reporting: profit and loss, balance sheet, cash flow, aged receivables
  and payables, analytics dashboard
- custom_reports: user-configured ad-hoc reports and their saved configs

Actual calculation logic lives in the engines and in the pure statement
functions; services only validate, read and delegate.
"""
