from kraken_scaffold.pipeline import main

main()
