"""
Command line driver for the hypercube Monte Carlo estimator.

    $ mc-integrate integrate --li 0 --ls 1 --d 3 --n 10000000 --workers 8
    $ mc-integrate integrate --li 0 --ls 1 --d 3 --n 10000000 --scaling
    $ mpiexec -n 4 mc-integrate integrate --li 0 --ls 1 --d 3 --n 10000000 --backend mpi
    $ mc-integrate scaling --li 0 --ls 1 --d 3 --n 10000000 --workers-list 1,2,4,8 --plot scaling.png
"""

import logging
import sys

import typer

from analysis.scaling_analysis import compute_experimental_scaling, compute_speedup, plot_scaling
from estimator.MC_integration import HypercubeMCEstimator
from estimator.errors import IntegrationError
from utils.commons import generate_default_configuration
from utils.constants import WORKERS, DEFAULT_SEED, DEFAULT_BACKEND, BACKENDS

app = typer.Typer(
    name="mc-integrate",
    help="Monte Carlo integration of exp(-|x|^2) over a hypercube with thread, process or MPI workers",
    no_args_is_help=True,
)


def _configure_logging(verbose):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _check_backend(backend):
    if backend not in BACKENDS:
        typer.echo(f"Error: unknown backend {backend}, expect one of {', '.join(BACKENDS)}", err=True)
        raise typer.Exit(1)


@app.command(name="integrate", help="Estimate the integral and its standard error")
def integrate(
    lower: float = typer.Option(..., "--li", help="Lower bound of every coordinate"),
    upper: float = typer.Option(..., "--ls", help="Upper bound of every coordinate"),
    dimensions: int = typer.Option(..., "--d", help="Number of dimensions"),
    sample_count: int = typer.Option(..., "--n", help="Total number of sample points"),
    workers: int = typer.Option(WORKERS, "--workers", "-w", help="Number of workers (ignored by MPI)"),
    seed: int = typer.Option(DEFAULT_SEED, "--seed", help="Global seed the worker seeds derive from"),
    backend: str = typer.Option(DEFAULT_BACKEND, "--backend", "-b", help="thread, process or mpi"),
    scaling: bool = typer.Option(False, "--scaling", help="Only print '<workers> <seconds>'"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress"),
) -> None:
    _configure_logging(verbose)
    _check_backend(backend)

    kwargs = generate_default_configuration(lower, upper, dimensions, sample_count, workers=workers,
                                            backend=backend, seed=seed)
    try:
        result = HypercubeMCEstimator(kwargs).estimate()
    except IntegrationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if result is None:
        return

    if scaling:
        typer.echo(f"{result.workers} {result.elapsed_time}")
        return

    typer.echo(f"Dimensions: {dimensions}")
    typer.echo(f"Points: {sample_count}")
    typer.echo(f"Bounds: ({lower}, {upper})")
    typer.echo(f"Integral: {result.integral}")
    typer.echo(f"Error: {result.standard_error}")
    typer.echo(f"Variance: {result.variance}")
    typer.echo(f"Time: {result.elapsed_time} s")
    typer.echo(f"Workers: {result.workers}")


@app.command(name="scaling", help="Time the same integral for several worker counts")
def scaling(
    lower: float = typer.Option(..., "--li", help="Lower bound of every coordinate"),
    upper: float = typer.Option(..., "--ls", help="Upper bound of every coordinate"),
    dimensions: int = typer.Option(..., "--d", help="Number of dimensions"),
    sample_count: int = typer.Option(..., "--n", help="Total number of sample points"),
    workers_list: str = typer.Option("1,2,4,8", "--workers-list", help="Comma separated worker counts"),
    seed: int = typer.Option(DEFAULT_SEED, "--seed", help="Global seed the worker seeds derive from"),
    backend: str = typer.Option(DEFAULT_BACKEND, "--backend", "-b", help="thread or process"),
    plot: str | None = typer.Option(None, "--plot", help="Save a speedup plot to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress"),
) -> None:
    _configure_logging(verbose)
    _check_backend(backend)
    if backend == "mpi":
        typer.echo("Error: scaling runs a local pool per worker count, use integrate --scaling under mpiexec instead", err=True)
        raise typer.Exit(1)

    try:
        counts = [int(w) for w in workers_list.split(",") if w.strip()]
    except ValueError:
        typer.echo(f"Error: invalid worker list {workers_list}", err=True)
        raise typer.Exit(1)
    if not counts or min(counts) < 1:
        typer.echo("Error: worker counts must be positive", err=True)
        raise typer.Exit(1)

    kwargs = generate_default_configuration(lower, upper, dimensions, sample_count, backend=backend, seed=seed)
    try:
        records = compute_experimental_scaling(kwargs, counts)
    except IntegrationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not records:
        return

    for workers, elapsed, speedup in compute_speedup(records):
        typer.echo(f"{workers} {elapsed} {speedup:0.3f}")

    if plot is not None:
        plot_scaling(records, plot)
        typer.echo(f"Saved plot to {plot}")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(130)


if __name__ == "__main__":
    main()
