"""Handlers for decoding *Pixel Data* and the utilities they share."""
