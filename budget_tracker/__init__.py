"""Client state and console front end for the budget tracker."""
