"""Domain services operating on the credential store."""
