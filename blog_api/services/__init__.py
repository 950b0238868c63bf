# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single domain aggregate:
#
#   auth_service       registration, login and profile lookup for User
#   post_service       CRUD + pagination + cache for Post
#   comment_service    CRUD for Comment, invalidating the parent Post
#
# ``ownership`` and ``serializers`` are shared helpers.
#
# All service functions accept an AsyncSession as their first argument.
# Reads leave the transaction to the ``get_db`` dependency; writes commit
# themselves so cache invalidation always follows the commit.
