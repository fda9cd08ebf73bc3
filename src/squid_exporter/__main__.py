from squid_exporter.cli import main

main()
