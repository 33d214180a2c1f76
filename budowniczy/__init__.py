"""Bot Budowniczy: building-supplies needs analysis and product recommendations."""
