"""Mess Attendance package.

Organized by feature modules (plans, students, attendance, tracking,
notifications) with a thin Flask controller layer over async
service/repository layers.
"""
