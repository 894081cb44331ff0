"""
Services package.

Business logic for feeds, personal RSS, subscriptions, program attempts,
user settings and the Qiita integration.
"""
