"""Attendance & Leave package.

This package is organized by feature modules (attendance, leave, entitlements,
holidays, approvals, users) with a thin Flask controller layer over
service/repository layers.
"""
