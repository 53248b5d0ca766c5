"""Client core: catalog view, selection, debouncing and the workflow controller."""
