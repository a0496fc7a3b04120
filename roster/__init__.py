"""Student roster editor: validation, persistence and the web surface around them."""
