"""
task_platform tests

- Record store framing, ordering and concurrency (`test_record_store.py`)
- Verifier client against the auth service (`test_verifier.py`)
- Auth service endpoints (`test_auth_service.py`)
- Gated tasks API (`test_tasks_api.py`)
- Gate event logging (`test_event_logger.py`)
"""
