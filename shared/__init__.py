"""
Shared Kernel

Base classes and value objects shared by every bounded context of the
equipment lending project. Nothing in here knows about Django models.
"""
