"""HTTP surface of the prediction engine."""
