from tcplink.cli import main

raise SystemExit(main())
