"""Built-in plugins shipped with crust."""
