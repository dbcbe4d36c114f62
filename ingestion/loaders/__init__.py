"""Datastore loaders."""
