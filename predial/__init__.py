"""Gestor Predial: building-maintenance catalog, AI workflows and branded reports."""
