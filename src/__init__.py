"""learnrank: recommendation and ranking engine for learning items."""
