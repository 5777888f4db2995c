"""Kubemon command line interface."""
