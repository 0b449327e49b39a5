"""nexxel.dev portfolio site with an embedded link shortener."""
