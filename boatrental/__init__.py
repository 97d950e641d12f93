"""Boat Rental Admin - back-office panel for a boat and jetski rental business."""
