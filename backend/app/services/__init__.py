# Services package init
"""
VoterReg Backend — Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and the store.
How:   Services receive the Store for each call, apply intake and review
       rules, and return schemas or public ids. Routes never touch tables.

Service Inventory:
    - FileService:         ID photo validation and bucket upload
    - BucketStorage:       local-filesystem buckets behind public URLs
    - ApplicantService:    find-or-create applicant, registration eligibility
    - ApplicationWriter:   parent application + per-type detail rows
    - ApplicationReader:   flattened read-back of one application
    - StatusService:       status transitions, remarks, hearing date, assignments
    - ApprovalService:     approval + voter record with compensation
    - SubmissionService:   validate → upload → resolve → write
    - Workflow:            ordered multi-step writes with compensation

Each module exposes a module-level singleton (e.g. `status_service`) used by
the routes; tests construct their own instances around an in-memory store.
"""
