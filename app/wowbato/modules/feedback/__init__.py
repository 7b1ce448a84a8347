"""
Resident feedback on projects. Authors edit their own feedback; authors and
admins may delete it.
"""
