"""
School service package.

Stores students and their course grades in PostgreSQL. A database
trigger keeps each student's GPA equal to the average of their grades, so
the service itself never computes it.
"""
