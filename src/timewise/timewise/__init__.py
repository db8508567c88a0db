"""TimeWise package.

Employees submit time-off events (vacation, sick day, ...) which are stored per
user in a document store and announced to mailing lists. The package is
organized by feature modules (events, mailing_lists, notifications, ...) with a
thin Flask controller layer over async service/gateway layers.
"""
