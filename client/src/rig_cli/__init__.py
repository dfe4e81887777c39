"""Command line front end for the rig SDK."""
