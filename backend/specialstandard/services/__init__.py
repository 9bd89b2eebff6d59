"""
SpecialStandard Backend — Services Layer
=========================================

What:  Clients for the external collaborators plus the flows that combine
       them with the repositories.

Service Inventory:
    - IdentityProviderClient: hosted auth REST API (httpx + tenacity)
    - ObjectStorageService:   S3 presigned URLs and listings (boto3)
    - EmailService:           transactional email via Resend (httpx)
    - ExpiringStore:          in-process password-reset codes with a TTL
    - AuthService:            login, signup, password and verification flows

CRUD routes call repositories directly; only flows that span several
collaborators go through a service.
"""
