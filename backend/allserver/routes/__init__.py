"""
All-Server Backend — API Routes Package
=========================================

Route Inventory:
    - users.py:       /api/users, /api/users/{id}
    - navigation.py:  /api/navigation, /api/navigation/{id},
                      POST /api/navigation/upload
    - health.py:      GET / (welcome), GET /health

Routes stay thin: extract request data, call a service, return the model.
"""
