"""formforge - a form builder backend with mirrored client/server validation."""
