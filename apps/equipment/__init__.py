"""Equipment catalog app package.

Holds equipment types and the physical units that can be lent out. The
booking subsystem reads these records to decide whether a unit is
bookable and which units share an exclusive pool; it only changes them
through the loan lifecycle (borrowed, returned).
"""
