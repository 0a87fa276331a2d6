"""Quel io package.

Proxy for the Kelio time-tracking intranet, organized by feature modules
(timesheet, portal, auth, storage, assets) behind a thin Flask controller
layer. The timesheet accounting core is pure and does no I/O.
"""
