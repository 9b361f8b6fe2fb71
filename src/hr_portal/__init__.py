"""HR portal package.

Organized by feature modules (employees, attendance, leaves, tasks) with a
thin Flask controller layer over service and repository layers.
"""
