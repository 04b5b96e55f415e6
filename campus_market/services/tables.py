"""Table names in the hosted store."""

PROFILES = "profiles"
USER_ROLES = "user_roles"
CATEGORIES = "categories"
SUBCATEGORIES = "subcategories"
CHAT_MESSAGES = "chat_messages"
CONTACT_SUBMISSIONS = "contact_submissions"
