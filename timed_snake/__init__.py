"""Timed snake: a single-player snake round on a wrap-around grid."""
