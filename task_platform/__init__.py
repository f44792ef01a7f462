"""
task_platform package

Two cooperating services:

- Auth Service (`auth_service`): verifies and issues bearer credentials
- Tasks Service (`tasks_service`): an auth-gated, append-only task log
"""
