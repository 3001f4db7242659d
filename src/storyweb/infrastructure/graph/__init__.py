"""Graph model lifecycle and force-directed layout."""
