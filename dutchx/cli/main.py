"""
dutchx CLI - Command Line Interface for the Dutch auction engine

Main entry point for all CLI commands.
"""

import json
import logging

import click

from dutchx import __version__
from dutchx.core.config import load_config
from dutchx.utils.logger import configure_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--env-file", default=None, type=click.Path(dir_okay=False), help=".env file with DUTCHX_* settings")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug, env_file):
    """Dutch-auction escrow and settlement engine"""
    config = load_config(env_file)
    if debug:
        config.log_level = logging.DEBUG

    configure_logging(config)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# =============================================================================
# Pricing
# =============================================================================


@cli.command("price")
@click.option("--start", "time_start", required=True, type=int, help="Window start timestamp")
@click.option("--end", "time_end", required=True, type=int, help="Window end timestamp")
@click.option("--price-start", required=True, type=int, help="Price at window start")
@click.option("--price-end", required=True, type=int, help="Price at window end")
@click.option("--now", required=True, type=int, help="Timestamp to price at")
def price(time_start, time_end, price_start, price_end, now):
    """Compute the ask price at a point in the window"""
    from dutchx.core.errors import AuctionError
    from dutchx.core.pricing import current_price

    try:
        value = current_price(now, time_start, time_end, price_start, price_end)
    except AuctionError as e:
        raise click.ClickException(str(e))

    click.echo(value)


# =============================================================================
# Config
# =============================================================================


@cli.command("config")
@click.pass_context
def show_config(ctx):
    """Show the effective configuration"""
    click.echo(json.dumps(ctx.obj["config"].as_dict(), indent=2))


# =============================================================================
# Demo Command
# =============================================================================


@cli.command("demo")
@click.option("--paid", default=150, type=int, help="Amount the buyer pays")
@click.option("--at", "buy_time", default=1500, type=int, help="Timestamp of the purchase")
@click.pass_context
def demo(ctx, paid, buy_time):
    """Run a list / buy / withdraw walk-through"""
    from dutchx.core.errors import AuctionError
    from dutchx.core.escrow import Collectible
    from dutchx.core.host import IdAllocator, ManualClock
    from dutchx.core.registry import Registry
    from dutchx.crypto import generate_keypair, bytes_to_hex

    config = ctx.obj["config"]

    click.echo("=" * 60)
    click.echo("  DUTCH AUCTION ESCROW - DEMO")
    click.echo("=" * 60)
    click.echo()

    alice = generate_keypair().address
    bob = generate_keypair().address
    platform = config.proceeds_recipient

    clock = ManualClock()
    registry = Registry(config.fee_percent, platform, config=config, clock=clock)
    ids = IdAllocator(b"dutchx.demo")

    click.echo(f"Registry: fee={config.fee_percent}%, recipient={bytes_to_hex(platform)}")
    click.echo(f"  Alice (seller): {bytes_to_hex(alice)}")
    click.echo(f"  Bob (buyer):    {bytes_to_hex(bob)}")
    click.echo()

    item = Collectible(asset_id=ids.next_id(), metadata={"name": "Painting #1"})
    registry.list_asset(item, 1000, 2000, 200, 100, alice)
    click.echo(f"Alice lists {item.metadata['name']} over [1000, 2000], price 200 -> 100")

    try:
        clock.set(buy_time)
        quote = registry.quote(item.asset_id)
        click.echo(f"At t={buy_time} the ask price is {quote}")

        bought = registry.buy(item.asset_id, paid, bob)
    except AuctionError as e:
        click.echo(f"Purchase rejected: {e}")
        return

    receipt = registry.last_receipt
    click.echo(f"Bob pays {paid} and receives {bought.metadata['name']}")
    click.echo(f"  Fee: {receipt.fee}, seller credit: {receipt.seller_credit}")
    click.echo()

    if registry.balance_of(alice):
        proceeds = registry.withdraw(alice)
        click.echo(f"Alice withdraws {proceeds.value}")
    if registry.balance_of(platform):
        fees = registry.withdraw(platform)
        click.echo(f"Platform withdraws {fees.value}")
    click.echo()

    click.echo(f"Stats: {registry.stats()}")
    click.echo("Demo complete!")


if __name__ == "__main__":
    cli()
