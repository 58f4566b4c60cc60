"""HTTP access layer for the budget tracker."""
