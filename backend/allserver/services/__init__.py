"""
All-Server Backend — Services Layer
=====================================

What:  Business logic layer sitting between routes (HTTP) and the database.
How:   Services accept a session and request data, apply business rules, and
       return response models or raise application exceptions.

Service Inventory:
    - UserService: CRUD for the users collection
    - NavigationService: CRUD for navigation sites, logo path rules, patches
    - UploadService: SVG upload pre-checks, storage, signature check, cleanup
"""
