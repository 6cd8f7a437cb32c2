# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single domain aggregate:
#
#   auth_service     : registration, login and user lookup
#   blog_service     : owner-scoped blog CRUD with unique slugs
#   comment_service  : comment CRUD and bulk delete for a blog
#   like_service     : like / unlike, status and recent likers
#   public_service   : anonymous feed, popular ranking and slug detail
#
# Shared helpers live in ``queries`` (count subqueries, lookups),
# ``serializers`` (response dicts) and ``ownership`` (the owner guard).
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.
