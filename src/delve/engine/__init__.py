"""Game rules: generation, visibility, combat, effects and turns."""
