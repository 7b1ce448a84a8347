"""
Barangay (tenant) directory.

- Admin-only create/update/delete; update/delete limited to the admin's own barangay
- Authenticated listing and detail
- Public options/directory endpoints used by the registration form and landing page
"""
