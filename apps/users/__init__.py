"""Users app package.

Keeps the borrowing profile attached to each Django user: whether the
account is approved to borrow, its role (user, staff, admin) and the
requester type used to pick loan limits (student, lecturer, staff).
Authentication itself is handled by ``django.contrib.auth``.
"""
