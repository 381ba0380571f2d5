"""Service layer: orchestrates the pure core and the barrow store.

Every public method returns a :class:`~barrowctl.services.result.ServiceResult`.
"""
