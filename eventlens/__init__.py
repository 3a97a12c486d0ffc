"""EventLens: event photo sharing with face tagging and invitations."""
