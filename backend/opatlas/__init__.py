# backend/opatlas/__init__.py
"""
OpAtlas backend application package.

This package contains:
- main: FastAPI application entrypoint
- playbooks: playbook records, tag index and search
- runs: playbook runs, checklist parsing, progress and metrics
- recommendations: playbook recommendation scoring
- activity / notifications / auth: supporting features
"""
