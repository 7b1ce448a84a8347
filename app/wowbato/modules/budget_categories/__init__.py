"""
Budget categories: the top level of a barangay's budget breakdown.
Every query is scoped to the barangay in the caller's session.
"""
