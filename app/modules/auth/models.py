# Supabase Auth
# Identities (email, password, sessions, JWTs) live in Supabase's auth.users
# table. The role used for authorization comes from the public.users profile
# row documented in app/modules/users/models.py.

"""
Supabase Auth calls used by this service:
- auth.sign_in_with_password() - Authenticate a user (fresh session-less client per call)
- auth.get_user(jwt) - Resolve the bearer token of every request
- auth.sign_out() - Logout
- auth.admin.* - User administration, see app/modules/users/service.py
"""
