"""
Routers module - API endpoint handlers organized by feature.

Each router handles a specific domain of the API:
- dashboard: session, projects, schedule and Drive upload for the console UI
- google_token: authorization-code exchange relay for the browser sign-in
"""
