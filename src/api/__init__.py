"""HTTP API for learnrank."""
