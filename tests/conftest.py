import matplotlib

# no display in CI
matplotlib.use("Agg")
