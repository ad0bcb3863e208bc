"""Normalization pipeline services (resolver -> expander -> allocation -> materializer -> cross-tab)."""
