#This file actually runs the simulation environment

import argparse
from dataclasses import replace

from src.config.simulation_config import SimulationConfig, load_config
from src.simulation.environment import DTNSimulation
from src.utils.log_setup import configure_debug
from analysis.metrics import check_window_contiguity, load_run_logs, summarize_run


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="PRoPHET DTN simulation with per-neighbor window logs")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--sim-time", type=float, help="Simulated seconds to run")
    parser.add_argument("--window-size", type=float, help="Observation window length in seconds")
    parser.add_argument("--log-dir", help="Directory for per-node window logs")
    parser.add_argument("--nodes", type=int, help="Number of nodes")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--plot", action="store_true", help="Plot windows of node 0 after the run")
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args(argv)


def build_config(args) -> SimulationConfig:
    config = load_config(args.config) if args.config else SimulationConfig()

    instrumentation = config.instrumentation
    if args.window_size is not None:
        instrumentation = replace(instrumentation, window_size=args.window_size)
    if args.log_dir is not None:
        instrumentation = replace(instrumentation, log_dir=args.log_dir)

    overrides = {"instrumentation": instrumentation}
    if args.sim_time is not None:
        overrides["sim_time"] = args.sim_time
    if args.nodes is not None:
        overrides["num_nodes"] = args.nodes
    if args.seed is not None:
        overrides["seed"] = args.seed
    return replace(config, **overrides)


def run_dtn_simulation(argv=None):
    """Function to run the DTN Simulation"""
    args = parse_args(argv)
    configure_debug(args.debug)
    config = build_config(args)

    print(f"Configuration: {config.num_nodes} nodes, window {config.instrumentation.window_size:.0f}s")
    print(f"Simulation time: {config.sim_time:.0f} seconds\n")

    simulation = DTNSimulation(config)
    simulation.run()

    counters = simulation.get_results()["counters"]
    print("\n=== SIMULATION RESULTS ===")
    print(f"Messages created: {counters.created} ({counters.created_flood} flood)")
    print(f"Transfers: {counters.transfers_started} started, {counters.transfers_done} done, "
          f"{counters.transfers_aborted} aborted")
    print(f"Delivered: {counters.delivered}")

    df = load_run_logs(config.instrumentation.log_dir)
    summary = summarize_run(df)
    print("\n=== WINDOW LOGS ===")
    print(f"{summary.rows} rows over {summary.windows} windows from {summary.observers} observers")
    print(f"Contacts: {summary.total_contacts}, contact time: {summary.total_contact_time:.0f}s")
    print(f"Transfer success rate: {summary.transfer_success_rate:.1%}, "
          f"abort rate: {summary.transfer_abort_rate:.1%}")
    print(f"Buffer: mean {summary.mean_buffer_bytes:.0f} B, max {summary.max_buffer_bytes} B")

    problems = check_window_contiguity(df, config.instrumentation.window_size)
    for problem in problems:
        print(f"WARNING: {problem}")

    if args.plot:
        from visualization.window_plots import WindowPlotter
        plotter = WindowPlotter()
        for path in (plotter.plot_contact_time(df, 0), plotter.plot_buffer_occupancy(df, 0)):
            if path is not None:
                print(f"Saved plot: {path}")

    return summary


if __name__ == "__main__":
    run_dtn_simulation()
