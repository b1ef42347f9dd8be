"""Visit Scheduler.

Backend for booking and scheduling prison visits.

High-level architecture
-----------------------

- ``visit_scheduler.scheduling``: pure eligibility and matching logic. Session
  date expansion, housing location / category / incentive matchers and the
  session template matcher used when migrating legacy visits.
- ``visit_scheduler.services``: the booking workflow. Applications reserve a
  session slot, are validated (capacity, non-associations, double booking,
  visiting order balance) and then become booked visits that can later be
  changed, cancelled, approved or rejected.
- ``visit_scheduler.clients``: HTTP clients for prisoner search, the prison API
  and the non-associations API.
- ``visit_scheduler.core``: logging, monitoring, exceptions, domain models and
  the SQLModel persistence layer.
- ``visit_scheduler.server``: the FastAPI application.

Typical workflow
----------------

1. Look up available visit sessions for a prisoner.
2. Reserve a slot, which creates an in-progress application.
3. Book the application, which validates it and creates a ``BOOKED`` visit.
4. Change the booking through a new application, or cancel it.
"""
