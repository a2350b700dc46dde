"""Bookings app package.

Loan and reservation requests for equipment. The admission decision is
made by the pure domain core in ``apps.bookings.domain`` (conflict
checker and validator); this app adds the ORM model, the store adapter
that feeds the core, the submission workflow and the REST API. Double
bookings are prevented twice: by the validator's pre-check and, on
PostgreSQL, by an exclusion constraint on the bookings table.
"""
