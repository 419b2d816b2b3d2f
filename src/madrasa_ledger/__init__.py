"""Madrasa Ledger package.

Organized by feature modules (students, teachers, courses, attendance, ledger,
periods, ...) with a thin Flask controller layer over service/repository
layers. The entity store holds the loaded snapshot every service reads from.
"""
