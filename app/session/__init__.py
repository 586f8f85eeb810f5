"""Session bootstrap (configuration overlay + initialize-before-use lifecycle)."""
